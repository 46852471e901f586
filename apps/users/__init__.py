"""Users app: e-mail login, market side, platform role and credit balance."""
