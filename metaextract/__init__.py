"""Meta Ads configurable extraction service"""
