"""Statement ingestion: file loading and bank-specific CSV adapters."""
