"""
Background assembly worker.

Assembly and export are heavy (hundreds of boolean unions), so hosts run
them off their interactive thread. AssemblyWorker owns one MeshKernel and
one worker thread fed by a FIFO: requests run strictly one at a time in
submission order and results come back as WorkerResponse messages, both
through the returned futures and an optional callback.

Request kinds and their responses:
    init           -> ready
    generate_tree  -> tree_ready (vertices, indices, report)
    export_stl     -> stl_ready (data, triangle_count)
    any failure    -> error (stage, message)

Cancelling a request discards its result: a queued request never runs,
a running one finishes inside the kernel but its response is dropped and
the previously assembled tree stays current.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal, Optional, Set, Union
import itertools
import logging
import threading

from ..errors import TreeGenError
from ..ops.mesh.kernel import MeshKernel
from ..specs.tree_spec import TreeSpec
from .export import scale_for_model_ratio, to_binary_stl
from .generate import build_tree

logger = logging.getLogger(__name__)

RequestKind = Literal["init", "generate_tree", "export_stl"]
ResponseKind = Literal["ready", "tree_ready", "stl_ready", "error"]

_DEFAULT_STAGE = {
    "init": "init",
    "generate_tree": "assembly",
    "export_stl": "export",
}


@dataclass
class WorkerResponse:
    """Message returned for one request."""

    kind: ResponseKind
    request_id: int
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


class AssemblyWorker:
    """
    Single-threaded FIFO executor around a MeshKernel session.

    Parameters
    ----------
    message_callback : Callable, optional
        Called on the worker thread with every response that is not
        discarded by cancellation
    kernel : MeshKernel, optional
        Session to use; a new one is created when omitted
    """

    def __init__(
        self,
        message_callback: Optional[Callable[[WorkerResponse], None]] = None,
        kernel: Optional[MeshKernel] = None,
    ):
        self.message_callback = message_callback
        self.kernel = kernel if kernel is not None else MeshKernel()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="treegen-assembly")
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._cancelled: Set[int] = set()
        self._futures: Dict[int, Future] = {}
        self._closed = False

    def submit(self, kind: RequestKind, payload: Optional[Dict[str, Any]] = None) -> "Future[Optional[WorkerResponse]]":
        """
        Queue a request.

        Returns
        -------
        Future
            Resolves to the WorkerResponse, or None if the request was
            cancelled
        """
        if kind not in _DEFAULT_STAGE:
            raise ValueError(f"Unknown request kind '{kind}'. Expected one of {sorted(_DEFAULT_STAGE)}")
        with self._lock:
            if self._closed:
                raise RuntimeError("AssemblyWorker has been shut down")
            request_id = next(self._ids)
            future = self._executor.submit(self._run, kind, request_id, dict(payload or {}))
            self._futures[request_id] = future
        future.request_id = request_id
        return future

    def init(self, reinitialize: bool = False) -> Future:
        return self.submit("init", {"reinitialize": reinitialize})

    def generate_tree(self, spec: Union[TreeSpec, dict, None] = None) -> Future:
        if isinstance(spec, TreeSpec):
            spec = spec.to_dict()
        return self.submit("generate_tree", {"spec": spec or {}})

    def export_stl(self, scale: Optional[float] = None, model_scale: Optional[float] = None) -> Future:
        """
        Serialize the last assembled tree.

        ``scale`` is a direct vertex factor; ``model_scale`` is a print
        ratio (200 for 1:200) and is used when ``scale`` is not given.
        """
        return self.submit("export_stl", {"scale": scale, "model_scale": model_scale})

    def cancel(self, request_id: Optional[int] = None) -> int:
        """
        Discard the result of one request, or of every outstanding request.

        Returns
        -------
        int
            Number of requests marked as cancelled
        """
        with self._lock:
            if request_id is None:
                ids = [rid for rid, f in self._futures.items() if not f.done()]
            elif request_id in self._futures and not self._futures[request_id].done():
                ids = [request_id]
            else:
                ids = []
            self._cancelled.update(ids)
        if ids:
            logger.info(f"Cancelled {len(ids)} assembly request(s)")
        return len(ids)

    def _is_cancelled(self, request_id: int) -> bool:
        with self._lock:
            return request_id in self._cancelled

    def _finish(self, request_id: int, response: Optional[WorkerResponse]) -> Optional[WorkerResponse]:
        with self._lock:
            self._futures.pop(request_id, None)
            discarded = request_id in self._cancelled
            self._cancelled.discard(request_id)
        if discarded or response is None:
            return None
        if self.message_callback is not None:
            self.message_callback(response)
        return response

    def _run(self, kind: str, request_id: int, payload: Dict[str, Any]) -> Optional[WorkerResponse]:
        if self._is_cancelled(request_id):
            return self._finish(request_id, None)

        try:
            if kind == "init":
                response = self._handle_init(request_id, payload)
            elif kind == "generate_tree":
                response = self._handle_generate(request_id, payload)
            else:
                response = self._handle_export(request_id, payload)
        except TreeGenError as e:
            logger.error(f"{kind} failed at stage '{e.stage}': {e.message}")
            response = WorkerResponse("error", request_id, e.to_dict())
        except Exception as e:
            stage = _DEFAULT_STAGE[kind]
            logger.error(f"{kind} failed at stage '{stage}': {e}")
            response = WorkerResponse("error", request_id, {"stage": stage, "message": str(e)})

        return self._finish(request_id, response)

    def _handle_init(self, request_id: int, payload: Dict[str, Any]) -> WorkerResponse:
        if payload.get("reinitialize"):
            self.kernel.reinitialize()
        else:
            self.kernel.initialize()
        return WorkerResponse("ready", request_id)

    def _handle_generate(self, request_id: int, payload: Dict[str, Any]) -> Optional[WorkerResponse]:
        spec = TreeSpec.from_dict(payload.get("spec") or {})
        previous = self.kernel.detach_current()
        try:
            mesh, report = build_tree(spec, kernel=self.kernel)
        except Exception:
            self.kernel.set_current(previous)
            raise

        if self._is_cancelled(request_id):
            self.kernel.set_current(previous)
            return None

        self.kernel.release(previous)
        return WorkerResponse(
            "tree_ready",
            request_id,
            {
                "vertices": mesh.vertices,
                "indices": mesh.indices,
                "report": report.to_dict(),
            },
        )

    def _handle_export(self, request_id: int, payload: Dict[str, Any]) -> WorkerResponse:
        self.kernel.initialize()
        mesh = self.kernel.current_mesh()

        scale = payload.get("scale")
        if scale is None and payload.get("model_scale") is not None:
            scale = scale_for_model_ratio(payload["model_scale"])

        data = to_binary_stl(mesh, scale=scale)
        return WorkerResponse(
            "stl_ready",
            request_id,
            {"data": data, "triangle_count": mesh.num_triangles},
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting requests, drain the queue and release the kernel session."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
        self.kernel.close()

    def __enter__(self) -> "AssemblyWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


__all__ = ["AssemblyWorker", "WorkerResponse", "RequestKind", "ResponseKind"]
