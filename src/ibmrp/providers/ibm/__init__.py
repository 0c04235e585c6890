"""IBM Cloud provider: SDK session, resource handlers and schemas."""
