"""Analytics domain - dashboard statistics and chart data"""
