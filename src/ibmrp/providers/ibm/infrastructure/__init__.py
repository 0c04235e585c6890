"""IBM Cloud infrastructure adapters."""
