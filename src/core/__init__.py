"""Core domain package for vidprivacy.

Core contains URL recognition, reply composition, and duplicate prevention
without any AT Protocol or HTTP-specific code, keeping the business logic
portable.
"""
