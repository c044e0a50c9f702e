"""Process entry point and configuration loading for the update agent."""
