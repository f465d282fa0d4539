"""
Tableview Grid Editor - Rendering Package
Canvas geometry and drawing helpers.
"""
