"""Product catalog domain"""
