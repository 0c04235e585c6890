"""IBM Cloud resource handlers."""

# Import handlers directly from their modules when needed

__all__: list[str] = [
    "IBMResourceHandler",
    "DatabaseInstanceHandler",
    "EventNotificationsDestinationHandler",
    "EventNotificationsSubscriptionHandler",
]
