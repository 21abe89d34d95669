"""Release orchestration.

- manifest / jsonfile: round-trip safe package.json and import-map I/O
- registry: static package table and publish order
- propagate / import_map: version propagation
- committer: clean-tree check, commit and annotated tag
- publish: tag-driven, ordered npm publishing
- service: the release and publish use cases
"""
