"""EmailListVerify provider clients."""
