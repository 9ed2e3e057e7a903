"""
Setup SQL for the hosted database.

Paste into the Supabase SQL editor. Every table is owned per row by
auth.users and protected by row-level security.
"""

from typing import Optional

TRADES_SQL = """
CREATE TABLE IF NOT EXISTS trades (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  user_id UUID REFERENCES auth.users(id) ON DELETE CASCADE NOT NULL,
  asset TEXT NOT NULL,
  type TEXT CHECK (type IN ('LONG', 'SHORT')) NOT NULL,
  leverage INTEGER NOT NULL,
  quantity DECIMAL NOT NULL,
  open_price DECIMAL NOT NULL,
  close_price DECIMAL,
  pnl DECIMAL NOT NULL,
  pnl_type TEXT CHECK (pnl_type IN ('REALIZED', 'UNREALIZED')) NOT NULL,
  open_time TIMESTAMP WITH TIME ZONE NOT NULL,
  close_time TIMESTAMP WITH TIME ZONE,
  notes TEXT,
  selected_tags TEXT[],
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

ALTER TABLE trades ENABLE ROW LEVEL SECURITY;

CREATE POLICY "Users can manage their own trades" ON trades
  FOR ALL USING (auth.uid() = user_id);
"""

USER_SETTINGS_SQL = """
CREATE TABLE IF NOT EXISTS user_settings (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  user_id UUID REFERENCES auth.users(id) ON DELETE CASCADE NOT NULL UNIQUE,
  starting_capital DECIMAL DEFAULT 0,
  notifications BOOLEAN DEFAULT true,
  email_updates BOOLEAN DEFAULT false,
  auto_backup BOOLEAN DEFAULT true,
  theme TEXT DEFAULT 'dark',
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

ALTER TABLE user_settings ENABLE ROW LEVEL SECURITY;

CREATE POLICY "Users can manage their own settings" ON user_settings
  FOR ALL USING (auth.uid() = user_id);
"""

SMART_WITHDRAWAL_SQL = """
CREATE TABLE IF NOT EXISTS smart_withdrawal_settings (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  user_id UUID REFERENCES auth.users(id) ON DELETE CASCADE NOT NULL UNIQUE,
  enabled BOOLEAN DEFAULT false,
  reinvest_percentage DECIMAL(5,2) DEFAULT 50,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

ALTER TABLE smart_withdrawal_settings ENABLE ROW LEVEL SECURITY;

CREATE POLICY "Users can view their own withdrawal settings" ON smart_withdrawal_settings
  FOR SELECT USING (auth.uid() = user_id);

CREATE POLICY "Users can insert their own withdrawal settings" ON smart_withdrawal_settings
  FOR INSERT WITH CHECK (auth.uid() = user_id);

CREATE POLICY "Users can update their own withdrawal settings" ON smart_withdrawal_settings
  FOR UPDATE USING (auth.uid() = user_id);
"""

WITHDRAWAL_TRANSACTIONS_SQL = """
CREATE TABLE IF NOT EXISTS withdrawal_transactions (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  user_id UUID REFERENCES auth.users(id) ON DELETE CASCADE NOT NULL,
  amount DECIMAL(15,2) NOT NULL CHECK (amount > 0),
  action TEXT CHECK (action IN ('WITHDRAW', 'REVERT')) NOT NULL,
  timestamp TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  description TEXT,
  reverted_id UUID REFERENCES withdrawal_transactions(id)
);

ALTER TABLE withdrawal_transactions ENABLE ROW LEVEL SECURITY;

-- Ledger rows are insert-only: no UPDATE or DELETE policy.
CREATE POLICY "Users can view their own transactions" ON withdrawal_transactions
  FOR SELECT USING (auth.uid() = user_id);

CREATE POLICY "Users can insert their own transactions" ON withdrawal_transactions
  FOR INSERT WITH CHECK (auth.uid() = user_id);

CREATE INDEX IF NOT EXISTS idx_withdrawal_transactions_user_id ON withdrawal_transactions(user_id);
CREATE INDEX IF NOT EXISTS idx_withdrawal_transactions_timestamp ON withdrawal_transactions(timestamp);
"""

UPDATED_AT_TRIGGER_SQL = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = NOW();
  RETURN NEW;
END;
$$ language 'plpgsql';

CREATE TRIGGER update_trades_updated_at
  BEFORE UPDATE ON trades FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE TRIGGER update_user_settings_updated_at
  BEFORE UPDATE ON user_settings FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE TRIGGER update_smart_withdrawal_settings_updated_at
  BEFORE UPDATE ON smart_withdrawal_settings FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""

TABLE_SQL = {
    "trades": TRADES_SQL,
    "user_settings": USER_SETTINGS_SQL,
    "smart_withdrawal_settings": SMART_WITHDRAWAL_SQL,
    "withdrawal_transactions": WITHDRAWAL_TRANSACTIONS_SQL,
}


def full_setup_sql() -> str:
    """All tables, policies and triggers, in dependency order."""
    parts = [TABLE_SQL[name].strip() for name in TABLE_SQL]
    parts.append(UPDATED_AT_TRIGGER_SQL.strip())
    return "\n\n".join(parts) + "\n"


def setup_sql_for(table: Optional[str]) -> str:
    """Setup SQL for one table, or everything when the table is unknown."""
    if table in TABLE_SQL:
        return TABLE_SQL[table].strip() + "\n"
    return full_setup_sql()
