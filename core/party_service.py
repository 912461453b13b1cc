"""
PartyService：對外的操作入口

每個操作的流程都一樣：

1. 找到 Party（找不到 -> PartyNotFound）
2. 持有該 Party 的鎖，呼叫 manager / ledger 修改 aggregate
3. 在鎖內做好 viewer projection 與 JSON snapshot
4. 釋放鎖後交給 dispatcher：存 snapshot、通知其他連線

第 4 步失敗只記 log，不影響回傳結果。
"""
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Protocol, Sequence

from core import claim_manager, party_manager, prediction_ledger
from core.exceptions import NotPartyMember
from core.locks import PartyLockRegistry
from core.party import Party, PredictionDraft
from core.side_effects import PostCommitDispatcher
from core.store import PartyStore
from models import ClaimStatus
from schemas import PartyView, PredictionRef
from services.clock_service import current_timestamp
from services.naming_service import create_id, generate_party_code
from services.projection_service import project_for_viewer

logger = logging.getLogger(__name__)


class SnapshotWriter(Protocol):
    def save(self, snapshot: Dict[str, Any]) -> None: ...


class ChangeNotifier(Protocol):
    def notify_party_changed(self, party_id: str) -> None: ...


class SubmissionResult(NamedTuple):
    prediction_refs: List[PredictionRef]
    party: PartyView


class ClaimResult(NamedTuple):
    claim_id: str
    party: PartyView


class VoteResult(NamedTuple):
    status: ClaimStatus
    yes_votes: int
    no_votes: int
    party: PartyView


class PartyService:

    def __init__(
        self,
        store: PartyStore,
        *,
        repository: Optional[SnapshotWriter] = None,
        notifier: Optional[ChangeNotifier] = None,
        dispatcher: Optional[PostCommitDispatcher] = None,
        locks: Optional[PartyLockRegistry] = None,
        clock: Callable[[], str] = current_timestamp,
        code_generator: Callable[[], str] = generate_party_code,
        id_factory: Callable[[str], str] = create_id
    ):
        self.store = store
        self.repository = repository
        self.notifier = notifier
        self.dispatcher = dispatcher or PostCommitDispatcher()
        self.locks = locks or PartyLockRegistry()
        self.clock = clock
        self.code_generator = code_generator
        self.id_factory = id_factory

    # ============ Membership ============

    def create_party(self, player_id: Optional[str], name: Optional[str]) -> PartyView:
        party = party_manager.create_party(
            self.store,
            player_id,
            name,
            clock=self.clock,
            code_generator=self.code_generator,
            id_factory=self.id_factory,
        )
        with self.locks.hold(party.id):
            view = project_for_viewer(party, player_id)
            snapshot = party.model_dump(mode="json")
        self._after_commit(party.id, snapshot)
        return view

    def join_party(self, code: Optional[str], player_id: Optional[str], name: Optional[str]) -> PartyView:
        party = self.store.require_by_code(code)
        with self.locks.hold(party.id):
            party_manager.join_party(party, player_id, name, clock=self.clock)
            view = project_for_viewer(party, player_id)
            snapshot = party.model_dump(mode="json")
        self._after_commit(party.id, snapshot)
        return view

    def get_party(self, party_id: Optional[str], viewer_id: Optional[str]) -> PartyView:
        """
        讀取 Party（只有成員可以讀）

        異常：
            PartyNotFound: Party 不存在
            NotPartyMember: viewer 不是成員
        """
        party = self.store.require(party_id)
        with self.locks.hold(party.id):
            if not viewer_id or not party.is_member(viewer_id):
                raise NotPartyMember(viewer_id, "access this party")
            return project_for_viewer(party, viewer_id)

    # ============ Predictions ============

    def submit_predictions(
        self,
        party_id: Optional[str],
        player_id: Optional[str],
        batch: Optional[Sequence[Optional[PredictionDraft]]]
    ) -> SubmissionResult:
        party = self.store.require(party_id)
        with self.locks.hold(party.id):
            created = prediction_ledger.submit_predictions(
                party,
                player_id,
                batch,
                clock=self.clock,
                id_factory=self.id_factory,
            )
            refs = [PredictionRef(id=prediction.id, target_id=prediction.target_id) for prediction in created]
            view = project_for_viewer(party, player_id)
            snapshot = party.model_dump(mode="json")
        self._after_commit(party.id, snapshot)
        return SubmissionResult(prediction_refs=refs, party=view)

    # ============ Claims / Votes ============

    def create_claim(
        self,
        party_id: Optional[str],
        player_id: Optional[str],
        prediction_id: Optional[str],
        revealed_text: Optional[str],
        salt: Optional[str]
    ) -> ClaimResult:
        party = self.store.require(party_id)
        with self.locks.hold(party.id):
            claim = claim_manager.create_claim(
                party,
                player_id,
                prediction_id,
                revealed_text,
                salt,
                clock=self.clock,
                id_factory=self.id_factory,
            )
            view = project_for_viewer(party, player_id)
            snapshot = party.model_dump(mode="json")
        self._after_commit(party.id, snapshot)
        return ClaimResult(claim_id=claim.id, party=view)

    def cast_vote(
        self,
        party_id: Optional[str],
        claim_id: Optional[str],
        player_id: Optional[str],
        vote: Optional[str]
    ) -> VoteResult:
        party = self.store.require(party_id)
        with self.locks.hold(party.id):
            claim = claim_manager.cast_vote(party, claim_id, player_id, vote, clock=self.clock)
            result = VoteResult(
                status=claim.status,
                yes_votes=claim.yes_votes,
                no_votes=claim.no_votes,
                party=project_for_viewer(party, player_id),
            )
            snapshot = party.model_dump(mode="json")
        self._after_commit(party.id, snapshot)
        return result

    # ============ Side effects ============

    def _after_commit(self, party_id: str, snapshot: Dict[str, Any]) -> None:
        if self.repository is not None:
            self.dispatcher.dispatch("persist", self.repository.save, snapshot)
        if self.notifier is not None:
            self.dispatcher.dispatch("notify", self.notifier.notify_party_changed, party_id)

    def flush(self, repository) -> int:
        """把整個 store 寫回 repository（shutdown 時呼叫）"""
        parties: List[Party] = []
        for party in self.store.all():
            with self.locks.hold(party.id):
                parties.append(party.model_copy(deep=True))
        count = repository.save_all(parties)
        logger.info(f"Flushed {count} parties to storage")
        return count
