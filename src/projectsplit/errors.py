from __future__ import annotations


class ValidationError(ValueError):
    pass


class ParticipantNotFoundError(LookupError):
    pass
