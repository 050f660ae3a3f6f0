"""
LetsFocus Test Suite
"""
