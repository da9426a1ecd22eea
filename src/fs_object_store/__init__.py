"""
Filesystem Object Store - S3-style buckets and keys on a plain directory tree

Maps bucket/key addressing onto files, answers prefix/delimiter listings from
a pruned directory walk, assembles multipart uploads and keeps MD5 ETags and
metadata documents alongside each object's content file.
"""

__version__ = "0.1.0"
