SCHEMA_SQL = r"""
-- Stores (reference data, soft-deleted via is_active)
CREATE TABLE IF NOT EXISTS stores (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  store_id TEXT NOT NULL UNIQUE CHECK (trim(store_id) <> ''),
  store_name TEXT NOT NULL,
  manager_name TEXT,
  manager_email TEXT,
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Products (reference data, soft-deleted via is_active)
CREATE TABLE IF NOT EXISTS products (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id TEXT NOT NULL UNIQUE CHECK (trim(product_id) <> ''),
  product_name TEXT NOT NULL,
  category TEXT,
  unit TEXT NOT NULL DEFAULT 'Pcs',
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Weekly count facts: one row per (week, store, product).
-- store_name / product_name are snapshots taken at submission time.
-- No foreign keys: facts outlive renamed or deactivated stores/products.
CREATE TABLE IF NOT EXISTS stock_submissions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  week_start_date TEXT NOT NULL,         -- ISO date (Sunday)
  store_id TEXT NOT NULL CHECK (trim(store_id) <> ''),
  store_name TEXT,
  product_id TEXT NOT NULL CHECK (trim(product_id) <> ''),
  product_name TEXT,

  opening_stock REAL NOT NULL DEFAULT 0,
  received REAL NOT NULL DEFAULT 0,
  sold REAL NOT NULL DEFAULT 0,
  closing_calculated REAL NOT NULL DEFAULT 0,   -- opening + received - sold
  physical_count REAL NOT NULL DEFAULT 0,
  variance REAL NOT NULL DEFAULT 0,             -- physical - closing_calculated

  submitted_by TEXT,
  submitted_at TEXT NOT NULL,            -- ISO datetime (UTC)

  UNIQUE (week_start_date, store_id, product_id)
);

-- Audit trail, one row per recorder call (append-only)
CREATE TABLE IF NOT EXISTS submission_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  week_start_date TEXT NOT NULL,
  store_id TEXT NOT NULL,
  submitted_by TEXT,
  submitted_at TEXT NOT NULL,
  item_count INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_sub_week ON stock_submissions(week_start_date);
CREATE INDEX IF NOT EXISTS idx_sub_store ON stock_submissions(store_id);
CREATE INDEX IF NOT EXISTS idx_sub_week_store ON stock_submissions(week_start_date, store_id);
"""
