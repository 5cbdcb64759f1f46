"""
package types with type specific build preparation
"""
