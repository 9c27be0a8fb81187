"""Settings domain - currency preference and weekly availability windows"""
