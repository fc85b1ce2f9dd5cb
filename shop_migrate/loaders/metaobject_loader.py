"""Loader for metaobject definitions and their entries."""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from .base import BaseLoader, LoadResult, user_errors_message
from ..extractors.graphql_extractor import GraphQLExtractor
from ..models.record import MetaobjectDefinition, MetaobjectEntry, ResultStatus
from ..services.conflict import ALREADY_EXISTS, DRY_RUN
from ..services.matcher import Matcher, handle_matcher

logger = logging.getLogger(__name__)

CREATE_DEFINITION_MUTATION = """
mutation CreateMetaobjectDefinition($definition: MetaobjectDefinitionCreateInput!) {
  metaobjectDefinitionCreate(definition: $definition) {
    metaobjectDefinition { id type }
    userErrors { field message }
  }
}
"""

CREATE_ENTRY_MUTATION = """
mutation CreateMetaobject($metaobject: MetaobjectCreateInput!) {
  metaobjectCreate(metaobject: $metaobject) {
    metaobject { id }
    userErrors { field message }
  }
}
"""

UPDATE_ENTRY_MUTATION = """
mutation UpdateMetaobject($id: ID!, $metaobject: MetaobjectUpdateInput!) {
  metaobjectUpdate(id: $id, metaobject: $metaobject) {
    metaobject { id }
    userErrors { field message }
  }
}
"""

type_matcher = Matcher(lambda definition: definition.type)


class DefinitionPhase(str, Enum):
    """Per-definition migration state."""
    DEFINE_TARGET = "define_target"
    SYNC_ENTRIES = "sync_entries"
    DONE = "done"
    ABORTED = "aborted"


class MetaobjectLoader(BaseLoader):
    """
    Two-phase loader for metaobjects.

    For each selected definition the target definition is ensured first
    (DEFINE_TARGET); entries are only synced (SYNC_ENTRIES) once the target
    type is known to exist. A failed definition create moves the definition to
    ABORTED and none of its entries are attempted.
    """

    entity_kind = "metaobjects"

    def __init__(self, source_client, target_client, **kwargs):
        super().__init__(source_client, target_client, **kwargs)
        self.source_extractor = GraphQLExtractor(source_client)
        self.target_extractor = GraphQLExtractor(target_client, best_effort=self.target_best_effort)
        self.phases: Dict[str, DefinitionPhase] = {}

    def load(self, item_ids: List[str]) -> LoadResult:
        """Migrate the definitions with the given source IDs, then their entries."""
        result = LoadResult(entity=self.entity_kind)

        wanted = set(str(i) for i in item_ids)
        definitions = [
            MetaobjectDefinition.from_node(node)
            for node in self.source_extractor.fetch_definitions()
            if str(node.get("id")) in wanted
        ]
        target_definitions = [
            MetaobjectDefinition.from_node(node) for node in self.target_extractor.fetch_definitions()
        ]
        logger.info(f"Migrating {len(definitions)} metaobject definitions (dry_run={self.dry_run})")

        for definition in definitions:
            self.phases[definition.type] = DefinitionPhase.DEFINE_TARGET
            try:
                phase = self._define_target(result, definition, target_definitions)
            except Exception as e:
                phase = DefinitionPhase.ABORTED
                result.error(definition.id, self._definition_title(definition), str(e))
            self.phases[definition.type] = phase
            if phase != DefinitionPhase.SYNC_ENTRIES:
                continue

            try:
                self._sync_entries(result, definition)
                self.phases[definition.type] = DefinitionPhase.DONE
            except Exception as e:
                self.phases[definition.type] = DefinitionPhase.ABORTED
                result.error(definition.id, f"{definition.name}: entries", str(e))

        logger.info(f"Finished metaobjects: {result.summary.to_dict()}")
        return result

    @staticmethod
    def _definition_title(definition: MetaobjectDefinition) -> str:
        return f"Definition: {definition.name}"

    def _define_target(
        self,
        result: LoadResult,
        definition: MetaobjectDefinition,
        target_definitions: List[MetaobjectDefinition]
    ) -> DefinitionPhase:
        title = self._definition_title(definition)

        if type_matcher.match(definition, target_definitions):
            # Definitions are never updated; presence of the type is enough
            result.add(definition.id, title, ResultStatus.SKIPPED, ALREADY_EXISTS)
            return DefinitionPhase.SYNC_ENTRIES

        if self.dry_run:
            result.add(definition.id, title, ResultStatus.CREATED, DRY_RUN)
            return DefinitionPhase.SYNC_ENTRIES

        try:
            data = self.target_client.graphql(CREATE_DEFINITION_MUTATION, {
                "definition": {
                    "type": definition.type,
                    "name": definition.name,
                    "fieldDefinitions": [f.to_create_input() for f in definition.field_definitions],
                    "access": {"storefront": "PUBLIC_READ"},
                },
            })
        except Exception as e:
            result.error(definition.id, title, str(e))
            return DefinitionPhase.ABORTED

        failure = user_errors_message(data, "metaobjectDefinitionCreate")
        if failure:
            result.error(definition.id, title, failure)
            return DefinitionPhase.ABORTED

        result.add(definition.id, title, ResultStatus.CREATED)
        return DefinitionPhase.SYNC_ENTRIES

    def _sync_entries(self, result: LoadResult, definition: MetaobjectDefinition) -> None:
        entries = [
            MetaobjectEntry.from_node(node, definition.type)
            for node in self.source_extractor.fetch_entries(definition.type)
        ]
        # Scoped to this type, so handle equality is enough
        target_entries = [
            MetaobjectEntry.from_node(node, definition.type)
            for node in self.target_extractor.fetch_entries(definition.type)
        ]
        logger.info(
            f"Syncing {len(entries)} {definition.type} entries ({len(target_entries)} on target)"
        )

        for entry in entries:
            title = f"{definition.name}: {entry.title}"
            self.apply(
                result,
                entry.id,
                title,
                handle_matcher.match(entry, target_entries),
                create=lambda entry=entry: self._create_entry(definition, entry),
                update=lambda target, entry=entry: self._update_entry(entry, target),
            )

    def _create_entry(self, definition: MetaobjectDefinition, entry: MetaobjectEntry) -> Optional[str]:
        data = self.target_client.graphql(CREATE_ENTRY_MUTATION, {
            "metaobject": {
                "type": definition.type,
                "handle": entry.handle,
                "fields": entry.field_inputs(),
            },
        })
        return user_errors_message(data, "metaobjectCreate")

    def _update_entry(self, entry: MetaobjectEntry, target: MetaobjectEntry) -> Optional[str]:
        data = self.target_client.graphql(UPDATE_ENTRY_MUTATION, {
            "id": target.id,
            "metaobject": {"fields": entry.field_inputs()},
        })
        return user_errors_message(data, "metaobjectUpdate")
