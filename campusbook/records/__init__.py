"""Domain operations written against the document store protocol."""
