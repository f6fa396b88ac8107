from enum import StrEnum


class TripCategory(StrEnum):
    TOUR = 'tour'
    TRANSPORT = 'transport'
    CHARTER = 'charter'
    EVENT = 'event'
