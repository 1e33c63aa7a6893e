"""
Fixture Instance - host lifecycle and the commit path

Owns the registries, the composed DMX frame, the Art-Net sender and the
generated control surface. Every mutation runs to completion under one lock:
mutate -> recompose -> flush -> feedbacks -> variables.
"""
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .compositor import compose, new_frame
from .config_fields import get_config_fields
from .constants import DEFAULT_REFRESH_INTERVAL_MS, VALUE_POLICIES, VALUE_POLICY_PRESERVE
from .logger import get_logger
from .registry import Registries, build_registries
from .sender import ArtNetSender, split_universe
from .surface import (
    action_definitions,
    derive_choices,
    feedback_definitions,
    preset_definitions,
    variable_definitions,
    variable_values,
)
from .transient import TransientStateManager
from .utils import clean_text, parse_int

logger = get_logger(__name__)


class InstanceStatus(Enum):
    CONNECTING = 'connecting'
    OK = 'ok'
    BAD_CONFIG = 'bad_config'
    ERROR = 'error'


class UnknownDefinitionError(KeyError):
    """Raised for an action or feedback id that is not currently defined."""


class FixtureInstance:
    """Art-Net fixture control surface"""

    def __init__(self, sender_factory: Callable[..., Any] = ArtNetSender.for_universe):
        """
        Args:
            sender_factory: Called as factory(target_ip, universe, refresh_interval_ms);
                must return an object with `values`, `transmit()` and `stop()`
        """
        self.sender_factory = sender_factory
        self.sender = None
        self.sender_error: Optional[str] = None
        self.config: Dict[str, Any] = {}
        self.status = InstanceStatus.CONNECTING
        self.status_message: Optional[str] = None

        self.registries = Registries()
        self.manager = TransientStateManager(commit=self.commit, write_raw=self.write_raw)
        self.dmx_buffer = new_frame()

        self.actions = {}
        self.feedbacks = {}
        self.variables: List[dict] = []
        self.variable_values: Dict[str, Any] = {}
        self.presets: Dict[str, dict] = {}
        self.feedback_states: Dict[str, bool] = {}
        # watch id -> (feedback id, options); re-evaluated after every commit
        self.watched_feedbacks: Dict[str, tuple] = {}

        self.listeners: List[Callable[[str, Any], None]] = []
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------

    def init(self, config):
        logger.debug("Initializing Art-Net fixture instance...")
        with self.lock:
            try:
                self.config = dict(config or {})
                self.update_status(InstanceStatus.CONNECTING)

                logger.debug("Step 1: Init Art-Net")
                self.init_artnet()

                logger.debug("Step 2: Process Config")
                self.process_config()

                logger.debug("Step 3: Init control surface")
                self._init_surface()

                self._update_status_from_config()
            except Exception as e:
                logger.error(f"Initialization failed: {e}", exc_info=True)
                self.update_status(InstanceStatus.ERROR, str(e))

    def config_updated(self, config):
        logger.debug("Config updated, re-initializing...")
        with self.lock:
            try:
                self.config = dict(config or {})
                self.init_artnet()
                self.process_config()
                self._init_surface()
                self._update_status_from_config()
            except Exception as e:
                logger.error(f"Config update failed: {e}", exc_info=True)
                self.update_status(InstanceStatus.ERROR, str(e))

    def destroy(self):
        with self.lock:
            self._stop_sender()
        logger.debug("Instance destroyed")

    def get_config_fields(self) -> List[dict]:
        return get_config_fields(self.config)

    def update_status(self, status: InstanceStatus, message: Optional[str] = None):
        self.status = status
        self.status_message = message
        self._notify('status', self.status_info())

    def status_info(self) -> dict:
        return {'status': self.status.value, 'message': self.status_message}

    def _update_status_from_config(self):
        if self.sender_error:
            self.update_status(InstanceStatus.ERROR, f"Art-Net sender failed: {self.sender_error}")
        elif self.config.get('host'):
            self.update_status(InstanceStatus.OK)
            logger.debug("Initialization complete (Ok)")
        else:
            self.update_status(InstanceStatus.BAD_CONFIG, 'Target Host not configured')
            logger.debug("Initialization complete (BadConfig)")

    def _init_surface(self):
        self.init_actions()
        self.init_feedbacks()
        self.init_presets()
        self.init_variables()
        self.update_dmx_buffer()
        self.send_dmx()
        self.check_feedbacks()

    # ------------------------------------------------------------------
    # Sender
    # ------------------------------------------------------------------

    def _stop_sender(self):
        if self.sender is None:
            return
        try:
            self.sender.stop()
        except Exception as e:
            logger.error(f"Stopping Art-Net sender failed: {e}")
        self.sender = None

    def init_artnet(self):
        """Replace the sender: the old one is fully stopped before the new one exists."""
        self._stop_sender()
        self.sender_error = None

        host = clean_text(self.config.get('host'))
        if not host:
            return

        universe = parse_int(self.config.get('universe')) or 0
        refresh = parse_int(self.config.get('refresh_interval_ms'))
        if refresh is None:
            refresh = DEFAULT_REFRESH_INTERVAL_MS

        try:
            self.sender = self.sender_factory(host, universe, refresh)
            net, subnet, uni = split_universe(universe)
            logger.info(f"Art-Net sender initialized for {host} "
                        f"(Univ: {universe} -> Net:{net}, Sub:{subnet}, Uni:{uni})")
        except Exception as e:
            self.sender = None
            self.sender_error = str(e)
            logger.error(f"Art-Net initialization failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Registries and generated surface
    # ------------------------------------------------------------------

    def process_config(self):
        policy = self.config.get('value_policy', VALUE_POLICY_PRESERVE)
        if policy not in VALUE_POLICIES:
            logger.warning(f"Unknown value_policy {policy!r}, using '{VALUE_POLICY_PRESERVE}'")
            policy = VALUE_POLICY_PRESERVE

        self.registries = build_registries(self.config, previous=self.registries, value_policy=policy)
        self.manager.rebuild(self.registries)
        self.watched_feedbacks.clear()

    def init_actions(self):
        try:
            choices = derive_choices(self.registries)
            self.actions = action_definitions(choices, self.manager)
        except Exception as e:
            logger.error(f"InitActions failed: {e}")

    def init_feedbacks(self):
        try:
            choices = derive_choices(self.registries)
            self.feedbacks = feedback_definitions(choices, self.registries)
        except Exception as e:
            logger.error(f"InitFeedbacks failed: {e}")

    def init_variables(self):
        try:
            self.variables = variable_definitions(self.registries)
            self.update_variables()
        except Exception as e:
            logger.error(f"InitVariables failed: {e}")

    def update_variables(self):
        try:
            self.variable_values = variable_values(self.registries)
            self._notify('variables', self.variable_values)
        except Exception as e:
            logger.error(f"UpdateVariables failed: {e}")

    def init_presets(self):
        try:
            self.presets = preset_definitions(self.registries)
        except Exception as e:
            logger.error(f"InitPresets failed: {e}")

    # ------------------------------------------------------------------
    # Commit path
    # ------------------------------------------------------------------

    def update_dmx_buffer(self):
        try:
            self.dmx_buffer = compose(self.registries.fixtures, self.registries.templates)
        except Exception as e:
            logger.error(f"UpdateDmxBuffer failed: {e}")

    def send_dmx(self):
        try:
            if self.sender is not None:
                self.sender.values[:len(self.dmx_buffer)] = self.dmx_buffer.tobytes()
                self.sender.transmit()
        except Exception as e:
            logger.error(f"SendDMX failed: {e}")

    def check_feedbacks(self):
        """Re-evaluate preset button feedbacks and watched feedbacks."""
        states = {}
        for preset_id, preset in self.presets.items():
            states[preset_id] = all(
                self._evaluate(fb['feedback_id'], fb['options']) for fb in preset['feedbacks']
            )
        for watch_id, (feedback_id, options) in self.watched_feedbacks.items():
            states[watch_id] = self._evaluate(feedback_id, options)
        self.feedback_states = states
        self._notify('feedbacks', states)

    def commit(self):
        self.update_dmx_buffer()
        self.send_dmx()
        self.check_feedbacks()
        self.update_variables()

    def write_raw(self, slot: int, value: int):
        """Second write path: straight into the composed frame, then flush."""
        self.dmx_buffer[slot] = value
        self.send_dmx()

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------

    def run_action(self, action_id: str, options: Optional[dict] = None):
        """Invoke an action's press callback."""
        with self.lock:
            action = self.actions.get(action_id)
            if action is None:
                raise UnknownDefinitionError(action_id)
            return action.callback(options or {})

    def release_action(self, action_id: str, options: Optional[dict] = None):
        """Invoke the release handler of a momentary action (no-op for others)."""
        with self.lock:
            action = self.actions.get(action_id)
            if action is None:
                raise UnknownDefinitionError(action_id)
            release = action.on_release(options or {})
            if release is None:
                return None
            return release()

    def evaluate_feedback(self, feedback_id: str, options: Optional[dict] = None) -> bool:
        with self.lock:
            if feedback_id not in self.feedbacks:
                raise UnknownDefinitionError(feedback_id)
            return self._evaluate(feedback_id, options or {})

    def watch_feedback(self, watch_id: str, feedback_id: str, options: Optional[dict] = None) -> bool:
        """Register a feedback for re-evaluation after every commit; returns its current state."""
        with self.lock:
            if feedback_id not in self.feedbacks:
                raise UnknownDefinitionError(feedback_id)
            self.watched_feedbacks[watch_id] = (feedback_id, dict(options or {}))
            state = self._evaluate(feedback_id, options or {})
            self.feedback_states[watch_id] = state
            return state

    def _evaluate(self, feedback_id, options) -> bool:
        feedback = self.feedbacks.get(feedback_id)
        if feedback is None:
            return False
        try:
            return bool(feedback.callback(options))
        except Exception as e:
            logger.error(f"Feedback {feedback_id} failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Callable[[str, Any], None]):
        self.listeners.append(listener)

    def _notify(self, event: str, payload: Any):
        for listener in list(self.listeners):
            try:
                listener(event, payload)
            except Exception as e:
                logger.warning(f"Listener for '{event}' failed: {e}")
