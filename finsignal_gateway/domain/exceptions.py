"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Input is empty or malformed so a statistic cannot be computed"""

    pass


class InsufficientHistoryError(DomainException):
    """Not enough historical samples for a stable forecast baseline"""

    pass


class UnknownTaskError(DomainException):
    """Assistant task is not registered"""

    pass


class LLMGatewayError(DomainException):
    """LLM gateway returned an error or is unavailable"""

    pass


class LLMRateLimitedError(LLMGatewayError):
    """LLM gateway rejected the call because of rate limiting"""

    pass


class LLMCreditsExhaustedError(LLMGatewayError):
    """LLM gateway account has no remaining credits"""

    pass
