"""Routing — ordered route table, pattern compiler, and handler chains.

Routes are registered during setup and only read while requests are
being dispatched.
"""
