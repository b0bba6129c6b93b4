"""Integer-backed enums shared by models and request schemas."""

from enum import Enum, IntEnum


class StatusVisibility(IntEnum):
    PUBLIC = 0
    UNLISTED = 1
    FOLLOWERS = 2
    PRIVATE = 3
    AUTHENTICATED = 4


class MastodonVisibility(IntEnum):
    PUBLIC = 0
    UNLISTED = 1
    PRIVATE = 2
    DIRECT = 3


class Business(IntEnum):
    """Travel reason, printed as the numeric code in exports."""

    PRIVATE = 0
    BUSINESS = 1
    COMMUTE = 2


class TransportCategory(str, Enum):
    NATIONAL_EXPRESS = "nationalExpress"
    NATIONAL = "national"
    REGIONAL_EXP = "regionalExp"
    REGIONAL = "regional"
    SUBURBAN = "suburban"
    BUS = "bus"
    FERRY = "ferry"
    SUBWAY = "subway"
    TRAM = "tram"
    TAXI = "taxi"
    PLANE = "plane"
