from dataclasses import dataclass
from typing import Optional

from bio.models import AccessLog, MedicalProfile


@dataclass(frozen=True)
class ClientInfo:
    ip: Optional[str]
    user_agent: str = ''

    @classmethod
    def from_request(cls, request) -> 'ClientInfo':
        meta = getattr(request, 'META', {})
        return cls(
            ip=meta.get('REMOTE_ADDR') or None,
            user_agent=(meta.get('HTTP_USER_AGENT') or 'unknown')[:1000],
        )


def record_access_attempt(profile: MedicalProfile, client: ClientInfo, granted: bool) -> AccessLog:
    return AccessLog.objects.create(
        medical_profile=profile,
        ip_address=client.ip,
        user_agent=client.user_agent,
        access_granted=granted,
    )
