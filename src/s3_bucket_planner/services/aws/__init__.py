"""S3 validation, expansion and output projection."""
