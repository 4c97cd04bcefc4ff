"""Cart and checkout session domain"""
