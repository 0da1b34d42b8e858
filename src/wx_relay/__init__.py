"""
wx-relay package.

Provides:
- A pure normalizer turning free-text model output into exact-size lists and tables
- Thin upstream wrappers for IAM token exchange, watsonx.ai chat and GA4 analytics
- A FastAPI relay exposing /token, /generate, /generateTable and /analytics
"""
