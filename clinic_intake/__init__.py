"""Bulk clinical-record import service."""
