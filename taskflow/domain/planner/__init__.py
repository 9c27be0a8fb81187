"""Planner domain - tasks placed into fixed daily time slots"""
