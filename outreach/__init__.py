"""Outreach application for the rivvi backend.

Models, services, actions and the RPC router behind the organization,
campaign, run, patient and call APIs.
"""
