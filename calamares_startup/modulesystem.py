"""Default module subsystem.

Discovers `module.desc` descriptors under the module search paths, then
instantiates the modules named in the settings sequence. Both phases run as
callbacks on the event loop and report back through ModuleEvent signals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import ModuleDescriptorError
from .events import EventDispatcher, Handler, ModuleEvent
from .lib.descriptors import load_yaml_mapping
from .settings import ModuleAction, SequenceStep

logger = logging.getLogger(__name__)


MODULE_DESCRIPTOR = "module.desc"
MODULE_TYPES = {"job", "view"}


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    type: str
    interface: str
    directory: Path
    required_modules: Tuple[str, ...] = ()


@dataclass
class ModuleInstance:
    instance_key: str
    descriptor: ModuleDescriptor
    action: ModuleAction
    configuration: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.descriptor.name


def split_instance_key(key: str) -> Tuple[str, str]:
    """`name@id` -> (name, id); a bare `name` is its own id."""
    if "@" in key:
        name, _, instance_id = key.partition("@")
        return name, instance_id
    return key, key


def load_module_descriptor(path: Path) -> ModuleDescriptor:
    try:
        raw = load_yaml_mapping(path)
    except ValueError as e:
        raise ModuleDescriptorError(str(e)) from e

    name = str(raw.get("name") or "").strip()
    if not name:
        raise ModuleDescriptorError(f"module descriptor without a name: {path}")
    mtype = str(raw.get("type") or "")
    if mtype not in MODULE_TYPES:
        raise ModuleDescriptorError(f"module {name} has unknown type {mtype!r}")

    required = raw.get("requiredModules") or []
    if not isinstance(required, list):
        raise ModuleDescriptorError(f"module {name}: requiredModules must be a list")

    return ModuleDescriptor(
        name=name,
        type=mtype,
        interface=str(raw.get("interface") or "python"),
        directory=path.parent,
        required_modules=tuple(str(r) for r in required),
    )


class ModuleManager:
    def __init__(
        self,
        search_paths: Sequence[str],
        sequence: Sequence[SequenceStep],
        dispatcher: EventDispatcher,
        *,
        custom_instances: Sequence[Dict[str, str]] = (),
    ):
        self._search_paths = list(search_paths)
        self._sequence = list(sequence)
        self._dispatcher = dispatcher
        self._custom = {f"{i['module']}@{i['id']}": i for i in custom_instances}
        self._available: Dict[str, ModuleDescriptor] = {}
        self._loaded: List[ModuleInstance] = []

    def connect(self, event: ModuleEvent, handler: Handler) -> None:
        self._dispatcher.connect(event, handler)

    def available_modules(self) -> List[str]:
        return sorted(self._available)

    def loaded_instances(self) -> List[ModuleInstance]:
        return list(self._loaded)

    def init(self) -> None:
        self._dispatcher.schedule(self._do_init)

    def load_modules(self) -> None:
        self._dispatcher.schedule(self._do_load)

    def _do_init(self) -> None:
        for search_path in self._search_paths:
            base = Path(search_path)
            if not base.is_dir():
                logger.debug("Module search path %s does not exist", base)
                continue
            for sub in sorted(p for p in base.iterdir() if p.is_dir()):
                desc = sub / MODULE_DESCRIPTOR
                if not desc.is_file():
                    continue
                try:
                    module = load_module_descriptor(desc)
                except ModuleDescriptorError as e:
                    logger.warning("Skipping module in %s: %s", sub, e)
                    continue
                if module.name in self._available:
                    logger.debug("Module %s already found, ignoring %s", module.name, sub)
                    continue
                self._available[module.name] = module

        logger.info("Found %d modules: %s", len(self._available), ", ".join(self.available_modules()))
        self._dispatcher.emit(ModuleEvent.INIT_DONE)

    def _configuration_for(self, key: str, module: ModuleDescriptor) -> Dict[str, Any]:
        custom = self._custom.get(key)
        conf_name = custom["config"] if custom else f"{module.name}.conf"
        conf_path = module.directory / conf_name
        if not conf_path.is_file():
            return {}
        return load_yaml_mapping(conf_path)

    def _instantiate(self, key: str, action: ModuleAction) -> Optional[ModuleInstance]:
        name, instance_id = split_instance_key(key)
        if instance_id != name and key not in self._custom:
            logger.error("Custom instance %s is not declared in settings", key)
            return None

        module = self._available.get(name)
        if module is None:
            logger.error("Module %s not found in %s", name, self._search_paths)
            return None
        if action is ModuleAction.SHOW and module.type != "view":
            logger.error("Module %s is a %s module and cannot be shown", name, module.type)
            return None

        try:
            config = self._configuration_for(key, module)
        except ValueError as e:
            logger.error("Bad configuration for %s: %s", key, e)
            return None
        return ModuleInstance(instance_key=key, descriptor=module, action=action, configuration=config)

    def _do_load(self) -> None:
        failed: List[str] = []
        seen = {m.instance_key for m in self._loaded}

        for step in self._sequence:
            for key in step.instance_keys:
                if key in seen:
                    continue
                inst = self._instantiate(key, step.action)
                if inst is None:
                    failed.append(key)
                    continue
                seen.add(key)
                self._loaded.append(inst)

        if failed:
            self._dispatcher.emit(ModuleEvent.MODULES_FAILED, failed)
        else:
            self._dispatcher.emit(ModuleEvent.MODULES_LOADED)

    def check_requirements(self) -> List[Tuple[str, str]]:
        """Report (instance, missing module) pairs for unmet requiredModules."""

        names = {m.name for m in self._loaded}
        unmet: List[Tuple[str, str]] = []
        for inst in self._loaded:
            for req in inst.descriptor.required_modules:
                if req not in names:
                    logger.warning("Module %s requires %s, which is not loaded", inst.instance_key, req)
                    unmet.append((inst.instance_key, req))
        return unmet
