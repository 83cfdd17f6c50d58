"""Feature modules.

Each feature registers the text shapes it claims with the dispatch registry
and receives every inbound message from the router.
"""
