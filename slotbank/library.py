"""JSON persistence for slot libraries.

A library file looks like::

	{
	  "version": "1.0",
	  "timestamp": "2026-01-01T12:00:00+00:00",
	  "library": {
	    "name": "My Set",
	    "version": "1.0.0",
	    "slots": [
	      {"id": 5, "code": "note(\\"c4\\").fast($speed)", "name": "Lead", "category": "melody",
	       "ledColor": 13, "lastModified": 1767268800.0,
	       "dynamicParameters": [{"name": "speed", "value": 2.05, "minValue": 0.1,
	                              "maxValue": 4.0, "assignedKnob": 0, "displayName": "Speed"}]}
	    ]
	  }
	}

Slots are always loaded as not playing.
"""

import dataclasses
import datetime
import json
import logging
import os
import typing

import slotbank.parameters
import slotbank.slots


logger = logging.getLogger(__name__)

FILE_FORMAT_VERSION = "1.0"


@dataclasses.dataclass
class LibraryFile:

	"""The contents of a library file."""

	name: str
	version: str
	slots: typing.List[slotbank.slots.PatternSlotDefinition]


def slot_to_dict (slot: slotbank.slots.PatternSlotDefinition) -> typing.Dict[str, typing.Any]:

	return {
		"id": slot.id,
		"code": slot.code,
		"name": slot.display_name,
		"category": slot.category,
		"ledColor": slot.led_color_playing,
		"lastModified": slot.last_modified,
		"dynamicParameters": [
			{
				"name": param.name,
				"value": param.value,
				"minValue": param.min_value,
				"maxValue": param.max_value,
				"assignedKnob": param.assigned_control_index,
				"displayName": param.display_name,
			}
			for param in slot.dynamic_parameters.values()
		],
	}


def slot_from_dict (data: typing.Mapping[str, typing.Any]) -> slotbank.slots.PatternSlotDefinition:

	"""Build a slot from its stored form. Missing optional fields get defaults."""

	parameters: typing.Dict[str, slotbank.parameters.DynamicParameter] = {}

	for item in data.get("dynamicParameters") or []:
		param = slotbank.parameters.DynamicParameter(
			name = item["name"],
			value = float(item["value"]),
			min_value = float(item["minValue"]),
			max_value = float(item["maxValue"]),
			assigned_control_index = item.get("assignedKnob"),
			display_name = item.get("displayName") or ""
		)
		parameters[param.name] = param

	return slotbank.slots.PatternSlotDefinition(
		id = int(data["id"]),
		code = data["code"],
		display_name = data.get("name", ""),
		category = data.get("category") or "",
		led_color_playing = int(data.get("ledColor", 0)),
		is_playing = False,
		dynamic_parameters = parameters,
		last_modified = data.get("lastModified")
	)


def serialize_library (name: str, version: str, slots: typing.Iterable[slotbank.slots.PatternSlotDefinition]) -> str:

	"""Return the JSON text of a library file."""

	document = {
		"version": FILE_FORMAT_VERSION,
		"timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
		"library": {
			"name": name,
			"version": version,
			"slots": [slot_to_dict(slot) for slot in slots],
		},
	}

	return json.dumps(document, indent=2)


def deserialize_library (text: str) -> LibraryFile:

	"""
	Parse the JSON text of a library file.

	Raises:
		ValueError: The text is not JSON, or is missing the document or
			library structure.
	"""

	try:
		document = json.loads(text)
	except json.JSONDecodeError as exc:
		raise ValueError(f"Failed to load library file: {exc}") from exc

	if not isinstance(document, dict) or "version" not in document or "library" not in document:
		raise ValueError("Invalid library file format")

	if document["version"] != FILE_FORMAT_VERSION:
		logger.warning(f"Library file version {document['version']} differs from current version {FILE_FORMAT_VERSION}")

	library = document["library"]

	if not isinstance(library, dict) or not library.get("name") or not isinstance(library.get("slots"), list):
		raise ValueError("Invalid library structure")

	return LibraryFile(
		name = library["name"],
		version = library.get("version", "1.0.0"),
		slots = [slot_from_dict(item) for item in library["slots"]]
	)


def load_slots (path: str) -> LibraryFile:

	"""Read a library file from ``path``."""

	with open(path, "r", encoding="utf-8") as f:
		library = deserialize_library(f.read())

	logger.info(f"Read library '{library.name}' from {path} ({len(library.slots)} patterns)")

	return library


def save_library (path: str, name: str, version: str, slots: typing.Iterable[slotbank.slots.PatternSlotDefinition]) -> None:

	"""Write a whole library to ``path``, replacing the file atomically."""

	text = serialize_library(name, version, slots)
	temp_path = f"{path}.tmp"

	with open(temp_path, "w", encoding="utf-8") as f:
		f.write(text)

	os.replace(temp_path, path)


def save_slot (path: str, slot: slotbank.slots.PatternSlotDefinition, name: str = "Untitled", version: str = "1.0.0") -> None:

	"""
	Store one slot in the library file at ``path``.

	The slot's record is replaced (or added) and the rest of the file is kept.
	A missing file is created as a library named ``name``.
	"""

	if os.path.exists(path):
		library = load_slots(path)
	else:
		library = LibraryFile(name=name, version=version, slots=[])

	slots = {existing.id: existing for existing in library.slots}
	slots[slot.id] = slot

	save_library(path, library.name, library.version, [slots[slot_id] for slot_id in sorted(slots)])
	logger.debug(f"Saved slot {slot.id} to {path}")


class LibraryStore:

	"""Bind a library path so ``save_slot`` fits the engine's persistence callback."""

	def __init__ (self, path: str, name: str = "Untitled", version: str = "1.0.0") -> None:

		self.path = path
		self.name = name
		self.version = version

	def load (self) -> LibraryFile:
		return load_slots(self.path)

	def save_slot (self, slot: slotbank.slots.PatternSlotDefinition) -> None:
		save_slot(self.path, slot, name=self.name, version=self.version)
