"""
Outgoing email producer interface.

Delivery is an external concern; use cases only enqueue. Every method
returns immediately and never raises into the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class EmailMessage:
    template: str
    to: str
    params: Dict[str, Any] = field(default_factory=dict)


class EmailQueue(ABC):
    @abstractmethod
    def enqueue(self, message: EmailMessage) -> None:
        """Schedule a message for delivery"""
        pass

    def queue_email_verification_email(
        self, to: str, first_name: str, org_name: str, verify_url: str, expires_in_hours: int
    ) -> None:
        self.enqueue(
            EmailMessage(
                "email_verification",
                to,
                {
                    "first_name": first_name,
                    "org_name": org_name,
                    "verify_url": verify_url,
                    "expires_in_hours": expires_in_hours,
                },
            )
        )

    def queue_password_reset_email(
        self, to: str, first_name: str, org_name: str, reset_url: str, expires_in_hours: int
    ) -> None:
        self.enqueue(
            EmailMessage(
                "password_reset",
                to,
                {
                    "first_name": first_name,
                    "org_name": org_name,
                    "reset_url": reset_url,
                    "expires_in_hours": expires_in_hours,
                },
            )
        )

    def queue_password_changed_email(
        self, to: str, first_name: str, org_name: str, changed_at: str, ip_address: str, support_email: str
    ) -> None:
        self.enqueue(
            EmailMessage(
                "password_changed",
                to,
                {
                    "first_name": first_name,
                    "org_name": org_name,
                    "changed_at": changed_at,
                    "ip_address": ip_address,
                    "support_email": support_email,
                },
            )
        )

    def queue_invitation_email(
        self,
        to: str,
        organization_name: str,
        role_name: str,
        invite_url: str,
        inviter_name: str,
        expires_in_hours: int,
    ) -> None:
        self.enqueue(
            EmailMessage(
                "invitation",
                to,
                {
                    "organization_name": organization_name,
                    "role_name": role_name,
                    "invite_url": invite_url,
                    "inviter_name": inviter_name,
                    "expires_in_hours": expires_in_hours,
                },
            )
        )

    def queue_account_locked_email(
        self, to: str, first_name: str, org_name: str, unlock_at: str, support_email: str
    ) -> None:
        self.enqueue(
            EmailMessage(
                "account_locked",
                to,
                {
                    "first_name": first_name,
                    "org_name": org_name,
                    "lock_reason": "Too many failed login attempts",
                    "unlock_at": unlock_at,
                    "support_email": support_email,
                },
            )
        )
