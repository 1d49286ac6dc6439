from enum import Enum


class HealthComponent(str, Enum):
    DOMAIN = "domain"
    SSL = "ssl"
    CONTENT = "content"
    PERFORMANCE = "performance"
