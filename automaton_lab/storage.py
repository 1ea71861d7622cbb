import logging
import threading
import uuid
from typing import Dict, List, Optional

from .automaton_model import Automaton
from .serialization import automaton_from_dict

logger = logging.getLogger(__name__)


class MemStorage:
    """
    Keyed in-memory store of automata.

    Payloads passed to create/update use the wire format without an id; the
    store assigns or keeps the id. Absent ids give None (or False on delete)
    rather than raising.
    """

    def __init__(self):
        self._automata: Dict[str, Automaton] = {}
        self._lock = threading.Lock()

    def get_automaton(self, automaton_id: str) -> Optional[Automaton]:
        return self._automata.get(automaton_id)

    def get_all_automata(self) -> List[Automaton]:
        return list(self._automata.values())

    def create_automaton(self, data: Dict) -> Automaton:
        automaton = automaton_from_dict(data, automaton_id=str(uuid.uuid4()))
        with self._lock:
            self._automata[automaton.id] = automaton
        logger.info("Created automaton %s (%s)", automaton.id, automaton.name)
        return automaton

    def update_automaton(self, automaton_id: str, data: Dict) -> Optional[Automaton]:
        automaton = automaton_from_dict(data, automaton_id=automaton_id)
        with self._lock:
            if automaton_id not in self._automata:
                return None
            self._automata[automaton_id] = automaton
        logger.info("Updated automaton %s", automaton_id)
        return automaton

    def delete_automaton(self, automaton_id: str) -> bool:
        with self._lock:
            deleted = self._automata.pop(automaton_id, None) is not None
        if deleted:
            logger.info("Deleted automaton %s", automaton_id)
        return deleted

    def clear(self) -> None:
        with self._lock:
            self._automata.clear()


storage = MemStorage()
