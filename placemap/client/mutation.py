# placemap/client/mutation.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from placemap.client.errors import ClientError


class MutationPhase(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"      # 원격 요청 성공, 로컬 상태 확정
    ROLLED_BACK = "rolled_back"  # 로컬 상태가 요청 전 상태로 남음
    FAILED = "failed"            # 원격 실패, 낙관적 변경은 유지


@dataclass
class Mutation:
    """
    공유 상태를 바꾸는 사용자 동작 하나의 2단계 기록.
    pending 에서 시작해 confirmed / rolled_back / failed 중 하나로 한 번만 전이합니다.
    """
    action: str
    target: Optional[str] = None
    phase: MutationPhase = MutationPhase.PENDING
    error: Optional[ClientError] = None

    @property
    def settled(self) -> bool:
        return self.phase is not MutationPhase.PENDING

    def _settle(self, phase: MutationPhase, error: Optional[ClientError] = None) -> 'Mutation':
        if self.settled:
            raise RuntimeError(f"이미 종료된 mutation 입니다: {self.action} ({self.phase.value})")
        self.phase = phase
        self.error = error
        return self

    def confirm(self) -> 'Mutation':
        return self._settle(MutationPhase.CONFIRMED)

    def roll_back(self, error: Optional[ClientError] = None) -> 'Mutation':
        return self._settle(MutationPhase.ROLLED_BACK, error)

    def fail(self, error: ClientError) -> 'Mutation':
        return self._settle(MutationPhase.FAILED, error)
