"""Symbol records, the semantic model protocol and capability predicates."""
