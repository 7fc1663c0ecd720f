"""
Interview completion relay API
"""
