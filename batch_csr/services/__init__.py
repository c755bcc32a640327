"""
Services Package - batch CSR generation engine

Modules:
- range_service: CN range expansion (YDL0001-YDL0010)
- clause_parser: Key=[v1,v2];Key2=[...] grammar shared by subject and SAN input
- subject_service: {CN} substitution and subject rendering
- san_service: subject alternative name parsing
- key_service: per-CSR key pair generation
- csr_service: PKCS#10 construction, signing and validation
- batch_service: pre-validation and fail-fast batch orchestration
- record_service: mapping records to the 9-column CSV row schema
"""
