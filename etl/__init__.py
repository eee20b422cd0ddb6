# WORKFLOW: ETL (Extract, Transform, Load) package for price archive ingestion.
# Used by: Ingestion pipeline, CLI ingest command
# Modules include:
# 1. archive.py - Extract CSV members from zip/tar uploads
# 2. parser.py - Parse CSV members into raw rows (header dropped)
# 3. validators.py - Ordered check chain turning rows into validated records
#
# ETL flow: Archive bytes -> CSV members -> rows -> validated records -> services/writer.py

"""
ETL package for Price Archive API data ingestion.
"""
