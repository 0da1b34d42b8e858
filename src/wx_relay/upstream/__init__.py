"""HTTP collaborators: IAM token exchange, watsonx.ai chat, GA4 analytics."""
