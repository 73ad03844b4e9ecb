"""
rgpd_compliance.exports

File exports produced by the service (CSV).
"""
