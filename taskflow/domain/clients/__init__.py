"""Clients domain - client records and their task rollups"""
