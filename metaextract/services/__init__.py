"""Service layer: Graph API client and extraction engine"""
