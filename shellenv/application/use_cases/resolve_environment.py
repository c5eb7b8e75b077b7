"""
Resolve Environment Use Case

Architectural Intent:
- The descriptor loader proper: Descriptor in, ActivationPlan out
- Evaluation (overlays + lookups) finishes before the first build starts,
  so unknown packages and missing overlay attributes fail with nothing built
- Packages are realised one at a time, in declaration order
- The inherited environment is an argument; nothing global is read

Flow:
1. load overlays (user directory, then descriptor order)
2. fold overlays over the catalog-backed base set
3. pick each referenced package (let-bound derivations shadow the set)
4. realise every package through the resolver
5. merge the environment
"""

import asyncio
import logging
from typing import Mapping

from shellenv.domain.entities.activation import ActivationPlan, ResolvedPackage
from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.entities.package import Package
from shellenv.domain.entities.package_set import PackageSet
from shellenv.domain.errors import UnknownPackageError
from shellenv.domain.ports.catalog_port import CatalogPort
from shellenv.domain.ports.overlay_source_port import OverlaySourcePort
from shellenv.domain.ports.resolver_port import ResolverPort
from shellenv.domain.services.environment import merge_environment
from shellenv.domain.services.overlay_composition import compose_overlays

logger = logging.getLogger(__name__)


class ResolveEnvironment:
    def __init__(
        self,
        catalog: CatalogPort,
        resolver: ResolverPort,
        overlay_loader: OverlaySourcePort,
        include_user_overlays: bool = True,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.overlay_loader = overlay_loader
        self.include_user_overlays = include_user_overlays

    def evaluate(self, descriptor: Descriptor) -> list[tuple[str, Package]]:
        overlays = self.overlay_loader.load_all(
            descriptor.overlays, include_user=self.include_user_overlays
        )
        final = compose_overlays(PackageSet(lookup=self.catalog.lookup), overlays)

        selected: list[tuple[str, Package]] = []
        missing: list[str] = []
        for ref in descriptor.packages:
            package = descriptor.derivations.get(ref.name) or final.get(ref.name)
            if package is None:
                missing.append(ref.name)
                continue
            if ref.override is not None:
                package = package.apply(ref.override)
            selected.append((ref.name, package))

        if missing:
            raise UnknownPackageError(missing)
        return selected

    async def execute(
        self, descriptor: Descriptor, inherited: Mapping[str, str]
    ) -> ActivationPlan:
        selected = await asyncio.get_running_loop().run_in_executor(
            None, self.evaluate, descriptor
        )

        artifacts = []
        for name, package in selected:
            store_path = await self.resolver.realise(package)
            logger.info("Resolved %s -> %s", name, store_path)
            artifacts.append(ResolvedPackage(name, store_path))

        environment = merge_environment(
            inherited,
            [a.store_path.bin_dir for a in artifacts],
            descriptor.variables,
            unset=descriptor.unset,
            name=descriptor.name,
        )
        return ActivationPlan(
            name=descriptor.name,
            artifacts=tuple(artifacts),
            environment=environment,
            shell_hook=descriptor.shell_hook,
        )
