"""Storage bucket and frames table service"""
