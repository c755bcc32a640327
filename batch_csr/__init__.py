"""
Batch CSR Generator

Generates one fresh key pair and one signed PKCS#10 request per common
name in a range, and hands the results back as structured records.
"""

__version__ = "1.0.0"
