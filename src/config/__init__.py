"""Deployment configuration (sms_config.yaml)."""
