"""
rgpd_compliance.api.routers

HTTP routers, one module per functional area.
"""
