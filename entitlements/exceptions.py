class EntitlementError(Exception):
    """Base class for entitlement engine errors."""


class ProviderFailure(EntitlementError):
    """A subscription lookup failed or could not be completed."""

    def __init__(self, company_id, reason=""):
        self.company_id = company_id
        self.reason = reason
        super().__init__(f"Subscription lookup failed for company {company_id}: {reason}")
