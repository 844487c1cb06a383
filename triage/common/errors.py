"""Exceptions shared across the triage packages."""


class AdvisoryUnavailable(Exception):
    """The external classifier could not produce a verdict (error, timeout, bad response)."""
    pass


class InvalidKeywordRule(ValueError):
    """Keyword rule rejected by the store (blank or duplicate keyword)."""
    pass
