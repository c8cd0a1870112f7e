"""Services: long-lived owners of application state."""
