"""
rgpd_compliance.rules

Pure, stateless rule tables (no I/O, no DB).

Responsibilities:
- DPIA preliminary scoring and CNIL list matching.
- `module.level` permission model and templates.
- Breach risk analysis and diagnostic questionnaire analysis.
- Data subject request deadlines and the compliance dashboard figures.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Everything here is unit-tested directly; services only adapt DB rows into these inputs.
