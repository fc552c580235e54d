"""File-based JSON storage: one document per save.

Data layout:
  data/
    saves/
      <save_id>.json     Whole world state of one playthrough (nations, units,
                         actions, events, chats). Always rewritten in full.
    debug/
      last_ai_response.txt   Raw text of the latest turn generation
    config.json          Game defaults (start date, world context, simulation rules)
  presets/
    nations.json         Static nation registry (read-only)
    roadmaps.json        Per-nation historical context for prompts
    starting_units.json  Units seeded into every new game

Every mutation path loads the full document, mutates it in memory and writes
the full document back (atomically, via a temp file + rename). Callers that
mutate must hold save_lock(save_id) for the whole load/mutate/write cycle.

Config: get_config() returns defaults merged with stored values.
update_config() overwrites known string keys and ignores everything else.
"""

# Re-export all public symbols so `from pax_historia import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    debug_dir,
    init_storage,
    presets_dir,
    read_json,
    saves_dir,
    write_json,
    write_text_atomic,
)

from .locks import (  # noqa: F401
    forget_lock,
    held_lock_count,
)

from .saves import (  # noqa: F401
    delete_save,
    list_save_summaries,
    list_saves,
    load_save,
    rename_save,
    save_exists,
    save_lock,
    write_save,
)

from .config import (  # noqa: F401
    get_config,
    update_config,
)
