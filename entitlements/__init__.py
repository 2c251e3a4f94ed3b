"""
Role permissions, route guards and subscription-plan feature gating.

The pure resolvers (roles, access, plans, features) need nothing but the
enums and catalogs in this package. Only the gates reach out, through a
SubscriptionProvider, to learn a company's tier.
"""
