from dataclasses import dataclass
from typing import Optional


@dataclass
class Site:
    id: int
    name: str
    subdomain: str

    custom_domain: Optional[str] = None
    domain_verified: bool = False

    is_active: bool = True
    is_deleted: bool = False

    def is_in_scope(self) -> bool:
        return self.is_active and not self.is_deleted

    def public_host(self, platform_domain: str) -> str:
        if self.custom_domain:
            return self.custom_domain

        return f"{self.subdomain}.{platform_domain}"

    def public_url(self, platform_domain: str) -> str:
        return f"https://{self.public_host(platform_domain)}"
