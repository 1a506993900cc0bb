# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the marketplace business logic:
# - models/: Pydantic schemas for profiles, assets, plans and notifications
# - services/: Authorization guard, moderation workflow, contributor
#   applications, subscriptions and admin settings
#
# Services take their collaborators (row store, mailer, identities) as
# constructor arguments. Only the exception taxonomy and auth models are
# shared with the app/ layer.
# =============================================================================
