"""Application-level configuration helpers for the CDK app."""
