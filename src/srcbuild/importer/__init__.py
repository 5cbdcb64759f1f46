"""
acquiring and updating package source trees
"""
