"""
dockersave - Export built container images to portable archive files.

A single pipeline stage: it accepts an image artifact produced by the
docker-import or docker-tag stages, runs ``docker save`` through a
pluggable driver, and writes the archive to the configured path. A
failed export never leaves a partial archive behind.

Key Features:
- Provenance gate on the artifact's builder id
- Driver protocol with a docker CLI implementation
- Pydantic configuration with DOCKERSAVE_* environment overrides
- OTel spans around every export

Example usage:
    from dockersave import DockerSavePostProcessor, ImageArtifact
    from dockersave.ui import ClickUi

    pp = DockerSavePostProcessor.configure({"path": "/tmp/out.tar"})
    artifact = ImageArtifact(
        id="sha256:abc123",
        builder_id="packer.post-processor.docker-import",
    )
    result = pp.post_process(ClickUi(), artifact)
"""

__version__ = "0.1.0"
__all__ = [
    "DockerSavePostProcessor",
    "PostProcessResult",
    "ImageArtifact",
    "DockerDriver",
    "__version__",
]


# Lazy imports to avoid loading pydantic and OTel at import time
def __getattr__(name: str):
    if name == "DockerSavePostProcessor":
        from dockersave.post_processor import DockerSavePostProcessor
        return DockerSavePostProcessor
    if name == "PostProcessResult":
        from dockersave.post_processor import PostProcessResult
        return PostProcessResult
    if name == "ImageArtifact":
        from dockersave.artifact import ImageArtifact
        return ImageArtifact
    if name == "DockerDriver":
        from dockersave.driver import DockerDriver
        return DockerDriver
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
