# --- Column-header synonyms (English / French) ---
# Keys are record fields; a header cell maps to the first field whose synonym it contains.
# Order matters: longer / more specific phrases first.
HEADER_SYNONYMS = {
    "date_operation": ["date operation", "date opération", "date op", "operation date"],
    "date_valeur": ["date valeur", "value date", "valeur"],
    "check_number": ["ch.no", "ch no", "chq", "check no", "cheque no", "n° cheque", "numero"],
    "reference": ["tr no/fact.no", "fact.no", "fact no", "reference", "ref"],
    "vendor": ["vendor provider", "vendor", "fournisseur", "provider"],
    "client": ["client", "customer", "beneficiaire", "bénéficiaire"],
    "description": ["description", "libellé", "libelle", "désignation", "designation"],
    "amount": ["amount", "montant"],
    "date": ["date"],
}

# Tokens that identify a header row in any section
HEADER_KEYWORDS = ["date", "description", "libelle", "libellé", "amount", "montant"]
