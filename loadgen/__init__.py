"""loadgen: saturate a CPU with SHA-256 hashing or a network path with UDP noise.

The engine (``loadgen.core``) runs a fixed pool of worker threads until a
caller-supplied stop token is raised; ``loadgen.run`` is the CLI around it.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
